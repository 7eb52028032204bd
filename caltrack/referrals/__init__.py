"""Referral program: settings, commission ledger and payouts."""
