"""
QOS ET Quality Report — KPI aggregation backend

Turns parsed complaint notifications and delivery quantities into monthly
per-site quality KPIs (complaint counts, defective parts, customer and
supplier PPM) and a global PPM pair.

To feed real data:
    Build Complaint and Delivery records from the spreadsheet extracts,
    pass each complaint through units.normalize_complaint, then call
    kpis.build_kpi_report(complaints, deliveries).

To connect to a front end:
    dashboard.get_quality_overview(report) returns a plain dict for the
    headline cards; transforms.kpis_to_frame(report.monthly) gives a
    DataFrame for charts and tables.

To change how unrecognised notification types are counted:
    Pass other_policy=OtherPolicy.EXCLUDE (or "exclude") to the
    aggregation functions instead of the default internal-complaint bucket.
"""
