"""Business services for catalog seeding, inventory and orders."""
