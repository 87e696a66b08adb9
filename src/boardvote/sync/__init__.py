"""Synchronization module for collections.

- reconcile: pure diff between stored games and an imported batch
- orchestrator: applies plans and vote changes to the store
"""
