CSS_LOG = """
/* Base styles */
body {
    background: #1e1e1e;
    color: #e0e0e0;
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
}

.content {
    max-width: 1200px;
    margin: 0 auto;
    padding: 1em;
}

.section {
    margin: 1.5em 0;
    padding: 1em;
    background: #2d2d2d;
    border-radius: 4px;
}

.subsection h4 {
    color: #9cc4ff;
}

.info { color: #e0e0e0; }
.debug { color: #9e9e9e; }
.warning { color: #ffcc66; }
.error { color: #ff8080; }

.result {
    margin: 0.5em 0;
    padding: 0.5em;
    background: #263238;
    border-left: 3px solid #3b82f6;
}

.table-container table {
    border-collapse: collapse;
}

.table-container th,
.table-container td {
    border: 1px solid #444;
    padding: 4px 10px;
}
"""
