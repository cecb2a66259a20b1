"""Bookings app package.

Field bookings and the transactional protocol that creates them without
double-booking a field.
"""
