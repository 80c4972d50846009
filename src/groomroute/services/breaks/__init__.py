"""Break suggestions and tracking."""
