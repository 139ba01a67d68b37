"""
Sales Analytics API

REST backend computing revenue, order, customer and breakdown analytics from
the sales_data table for the sales dashboard.
"""

__version__ = "1.0.0"
