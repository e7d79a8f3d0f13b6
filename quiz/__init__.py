"""
Client side of the profile quiz.

Holds the step-by-step wizard, its persistence and the signed-in session
that decides between the wizard and the status page.
"""
