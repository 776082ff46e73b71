"""
fuel_report package marker.
"""
