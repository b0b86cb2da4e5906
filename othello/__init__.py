"""Othello with the return-capture variant: rule engine and computer opponent."""
