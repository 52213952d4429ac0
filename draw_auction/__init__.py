"""Incentivized draw triggering and completion with sequential reward settlement."""
