"""Terminal rendering for envship.

Modules
-------
renderer
    ``DeployRenderer`` turns ``DeployResult``, resolved targets and artifact
    stats into Rich renderables for terminal display.
"""
