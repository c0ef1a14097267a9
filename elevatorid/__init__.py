"""ElevatorID — part ownership, transfer and installation ledger."""
