'''
Venue CRM Backend Test Suite

Test Modules:
-------------
- test_analytics.py: Analytics engine
  - Revenue estimator tiers and headcount handling
  - Funnel stage membership, negative dropoff, stage revenue
  - Monthly revenue buckets and chronological order
  - Channel attribution via first interaction
  - Time insights ordering, cap and tie-breaks

- test_schemas.py: Lenient timestamp and headcount coercion

- test_sheets.py: Google Sheet data source
  - CSV parsing and positional columns
  - Tab fallbacks, error translation, caching

- test_ai_assist.py: AI helpers with a stub generator
  - JSON extraction and normalization
  - Fallbacks and the rule-based manager digest

- test_filters.py: Saved filters and role default views

- test_api.py: Route contracts via TestClient

- test_jobs.py: Slack manager digest job

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

# Package is empty by design - all tests are in individual modules
# This file enables pytest discovery of the tests directory

__all__ = []
