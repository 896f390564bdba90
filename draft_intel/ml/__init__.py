"""
Prediction layer — interface to externally produced projections.

Modules
-------
predictor : Prediction value object, Predictor protocol, build_features(),
            and StaticPredictor (table-backed, deterministic).
"""
