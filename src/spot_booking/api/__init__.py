"""HTTP and push-channel interface."""
