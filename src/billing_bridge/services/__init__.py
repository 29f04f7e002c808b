"""Salesforce access and billing aggregation."""
