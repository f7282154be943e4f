"""Priority reconciliation, command emission and the retry loop."""
