"""Broker channel ownership."""

from .broker_channel import BrokerChannel, ChannelSource, FromConnectionSetting, FromSharedChannel

__all__ = ["BrokerChannel", "ChannelSource", "FromConnectionSetting", "FromSharedChannel"]
