"""
Prediction pipeline — providers in, ``ForecastResult`` out.

Modules
-------
predict : PredictionPipeline, forecast_with_deadline.
"""
