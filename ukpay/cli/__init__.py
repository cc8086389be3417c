"""uk-pay command-line interface."""
