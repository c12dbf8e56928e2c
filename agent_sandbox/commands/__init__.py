"""Agent Sandbox CLI commands"""
