"""Communication logging module.

Records transaction transcripts, serial port events and worker errors for
the modules driven through a CommandInterface.
"""

from iotmodem.logging.log_models import LogEntry
from iotmodem.logging.file_handler import FileHandler
from iotmodem.logging.communication_logger import CommunicationLogger

__all__ = ['LogEntry', 'FileHandler', 'CommunicationLogger']
