"""campaigndb command-line interface."""
