from .wire import message_to_dict, message_from_dict, encode_message, decode_message

__all__ = ["message_to_dict", "message_from_dict", "encode_message", "decode_message"]
