"""
Client base package.

Cross-cutting pieces shared by the messages, streaming and batches layers:
error taxonomy, structured logging, HTTP collaborator, retry and polling
policies, and cooperative cancellation.
"""
