from __future__ import annotations

PAPAPARSE = "https://cdn.jsdelivr.net/npm/papaparse@5.4.1/papaparse.min.js"
PLOTLY = "https://cdn.plot.ly/plotly-2.35.2.min.js"
APACHE_ARROW = "https://cdn.jsdelivr.net/npm/apache-arrow@17.0.0/Arrow.es2015.min.js"
PARQUET_WASM_MODULE = "https://cdn.jsdelivr.net/npm/parquet-wasm@0.6.1/esm/parquet_wasm.js"

CSV_SCRIPTS = (PAPAPARSE,)
PARQUET_SCRIPTS = (APACHE_ARROW,)
