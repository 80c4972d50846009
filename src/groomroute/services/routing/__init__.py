"""Route re-sequencing and daily route state."""
