from .remote import DocumentFactory, RemoteDocument

__all__ = ["DocumentFactory", "RemoteDocument"]
