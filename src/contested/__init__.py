"""
Contested - NIL marketplace onboarding.

Packages:
- onboarding: the wizard core (steps, forms, validation, submission)
- contested: settings, Supabase client, session service, web app and CLI
"""

__version__ = "0.1.0"
