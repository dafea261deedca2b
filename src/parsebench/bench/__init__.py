"""Measurement and ranking engine for parsebench.

Times interchangeable candidate operations under a warm-up + fixed-cycle
protocol, isolates candidates that crash, and ranks the results under a
strict and a tolerance-banded policy.
"""
