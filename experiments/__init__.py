"""Scenario sweeps, replication statistics and markup search for fuelsim."""
