"""Store backend: product catalog, accounts, orders and email notifications."""
