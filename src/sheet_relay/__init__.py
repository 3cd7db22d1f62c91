"""sheet-relay: upload spreadsheets to Google Drive and relay them to n8n.

Usage:
    sheet-relay serve       # Run the web service
    sheet-relay status      # Show configuration status
"""

__version__ = "0.1.0"
