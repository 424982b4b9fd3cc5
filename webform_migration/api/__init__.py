"""HTTP preview service for the webform migration."""
