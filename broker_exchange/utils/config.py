"""Configuration settings for the Broker Exchange application."""

import os
from decimal import Decimal


class Config:
    # Server settings
    HOST = os.getenv('EXCHANGE_HOST', '0.0.0.0')
    PORT = int(os.getenv('EXCHANGE_PORT', 3000))
    API_PREFIX = '/api/v1'

    # Storage settings
    STORAGE_DIR = os.getenv('EXCHANGE_STORAGE_DIR', 'storage')
    STOCKS_KEY = 'stocks'
    BROKERS_KEY = 'brokers'
    SETTINGS_KEY = 'trading-settings'
    BACKUP_KEY = 'original-stocks-backup'

    # Trading settings
    DEFAULT_SPEED_FACTOR = 1
    MIN_SPEED_FACTOR = 0.1  # seconds per simulated day
    PRICE_CHANGE_LIMIT = Decimal('0.05')  # +/- 5% per synthesized day
    MIN_PRICE = Decimal('0.01')

    # Seed data
    SEED_HISTORY_DAYS = 30
    SEED_STOCKS = {
        'AAPL': {
            'name': 'Apple, Inc.',
            'active': True,
            'price': '$182.52',
            'band': (180, 120, 200),
        },
        'SBUX': {
            'name': 'Starbucks, Inc.',
            'active': True,
            'price': '$91.32',
            'band': (90, 70, 110),
        },
        'MSFT': {
            'name': 'Microsoft, Inc.',
            'active': True,
            'price': '$412.65',
            'band': (400, 350, 420),
        },
        'CSCO': {
            'name': 'Cisco Systems, Inc.',
            'active': False,
            'price': '$47.84',
            'band': (45, 40, 55),
        },
        'QCOM': {
            'name': 'QUALCOMM Incorporated',
            'active': False,
            'price': '$168.42',
            'band': (160, 140, 180),
        },
        'AMZN': {
            'name': 'Amazon.com, Inc.',
            'active': True,
            'price': '$186.34',
            'band': (180, 140, 200),
        },
        'TSLA': {
            'name': 'Tesla, Inc.',
            'active': True,
            'price': '$172.63',
            'band': (170, 150, 250),
        },
        'AMD': {
            'name': 'Advanced Micro Devices, Inc.',
            'active': False,
            'price': '$166.24',
            'band': (160, 120, 180),
        },
    }

    # Logging settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
