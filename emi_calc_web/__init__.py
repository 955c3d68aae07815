"""Flask front end for the EMI planner."""
