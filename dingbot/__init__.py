"""
Scheduled Group-Chat Notification Robot
=======================================
Posts weather, tech articles and tech news to a group-chat robot webhook
at fixed times of day.
"""

__version__ = "1.0.0"
__author__ = "Notification Robot"
