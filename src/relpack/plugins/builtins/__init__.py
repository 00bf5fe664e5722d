"""Plugins shipped with relpack."""
