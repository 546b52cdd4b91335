"""Full Stack Deployment Setup - Main Package.

This package provides the setup tooling for a full-stack application
template: GitHub repository configuration and Terraform-driven AWS
infrastructure provisioning.
"""

__version__ = "1.0.0"
__author__ = "Full Stack Deployment Setup Team"
