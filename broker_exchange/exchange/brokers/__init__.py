"""
Broker accounts module for Exchange
"""

from .models import Broker, BrokerPatch, Holding
from .service import BrokersService

__all__ = ['Broker', 'BrokerPatch', 'BrokersService', 'Holding']
