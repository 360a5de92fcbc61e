"""Web front end for Medicita."""
