"""Grid pursuit simulation: a seeker races to a goal while chasers close in."""
