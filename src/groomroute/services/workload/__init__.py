"""Day workload assessment and groom intensity."""
