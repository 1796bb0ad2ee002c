"""HTTP surface of the widget relay."""
