class ChannelBusError(Exception):
    '''Base class for errors raised by channelbus.'''


class InvalidArgumentError(ChannelBusError, ValueError):
    '''Missing or empty channel name, missing callback or missing value.'''


class ConfigConflictError(ChannelBusError, ValueError):
    '''A registry tried to re-configure an already initialised default channel.'''
