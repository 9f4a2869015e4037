# Application Utilities
