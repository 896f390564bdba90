"""
Reporting — file exports for rankings, trend reports and calibration reports.

Modules:
    export — export_to_csv / export_to_json plus flatteners for ranked
             candidates and calibration category tables.
"""
