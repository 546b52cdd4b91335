"""AWS infrastructure setup.

This package drives Terraform per environment, manages the Terraform
state backend and the EC2 key pair, and propagates Terraform outputs
to GitHub secrets.
"""
