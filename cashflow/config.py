# cashflow/config.py

import os

# --- Logging ---
LOG_LEVEL = os.getenv("CASHFLOW_LOG_LEVEL", "INFO")

# --- Engine ---
# Upper bound on the run-to-depletion simulation when the principal never runs out.
MAX_YEARS = int(os.getenv("CASHFLOW_MAX_YEARS", 200))

# --- HTTP ---
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CASHFLOW_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# --- Export ---
EXPORT_FILENAME = os.getenv("CASHFLOW_EXPORT_FILENAME", "cashflow.csv")
