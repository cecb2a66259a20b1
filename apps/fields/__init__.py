"""Fields app package.

Bookable venues, their recurring weekly opening windows and date-specific
closures, plus the read-only slot resolver that merges those with active
bookings for display.
"""
