"""Transit Ticket Fraud Review Service.

This service provides APIs for fraud operators to:
- Score ticket transactions for fraud risk
- Classify transactions as pending, flagged or cleared
- Browse and filter recently analyzed transactions
- Clear or flag transactions after manual review
- View dashboard statistics
"""

__version__ = "0.1.0"
