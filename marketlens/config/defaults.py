DEFAULT_CONFIG = {
    # -----------------------------
    # REPORT DEFAULTS
    # -----------------------------
    "report": {
        "cadence": "weekly",   # daily | weekly | monthly
        "locale": "en",
    },

    # -----------------------------
    # CHART RENDERING
    # -----------------------------
    "charts": {
        "provider": "quickchart",          # quickchart | matplotlib
        "url": "https://quickchart.io/chart",
        "width": 400,
        "height": 300,
        "background": "#ffffff",
        "format": "png",
        "attempts": 3,             # total attempts per chart
        "backoff_seconds": 1.0,    # linear: 1s, 2s, ...
        "request_timeout": 15,     # per HTTP call
        "batch_timeout": 90,       # whole fan-out
        "max_workers": 6,
    },

    # -----------------------------
    # PDF LAYOUT
    # -----------------------------
    "pdf": {
        "page_size": "A4",     # A4 | letter
        "margin": 50,
        "compress": True,
        "font_dir": None,      # directory holding NotoSans.ttf (Cyrillic)
    },

    # -----------------------------
    # OUTPUT CONTROL
    # -----------------------------
    "output_dir": "runs",
}
