"""Domain layer: accounts, security credentials, recovery states, orders. Pure business rules."""
