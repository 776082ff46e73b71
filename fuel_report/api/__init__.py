"""
fuel_report/api package marker.
"""
