"""
RobARMA Test Suite

Tests for the robust primitives, the ARMA model and state-space layer, the
estimators and the Monte Carlo robustness scenarios. Long-running scenarios
carry the ``slow`` marker and are deselected by default; run them with
``pytest -m slow``.
"""
