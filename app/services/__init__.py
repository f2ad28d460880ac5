# app/services/__init__.py

"""
Service package: donation aggregation, forecasting, accuracy scoring,
A/B test evaluation, donation statistics and goal progress.
"""

from .prediction_service import prediction_service
