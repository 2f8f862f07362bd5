"""
Classes to facilitate working with Google Sheets
"""

# HTTP status Google uses to signal 'slow down'
GoogleSheetsRateLimitStatus = 429
# retry ceiling and back off cap for rate limited requests
GoogleSheetsMaxRateLimitRetries = 10
GoogleSheetsMaxRetrySleepMs = 32000
