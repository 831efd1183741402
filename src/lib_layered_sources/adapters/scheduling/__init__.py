"""Schedulers driving watch ticks."""
