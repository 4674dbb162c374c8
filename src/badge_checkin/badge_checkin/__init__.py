"""Badge Check-In package.

Bridges an NFC badge reader to the event check-in service. The package is
organized by feature modules (ndef, api, reader, checkin) with a thin Flask
kiosk controller layer on top of the check-in service.
"""
