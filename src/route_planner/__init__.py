"""Delivery route planner: oracle-backed route optimization with saved routes."""
