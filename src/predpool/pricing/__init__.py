"""CPMM pricing: shared curve math, cashout simulation, pricing engine."""
