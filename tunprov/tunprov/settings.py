# -*- coding: utf-8 -*-
"""Application configuration."""
import os


class Config(object):
    """Base configuration."""

    APP_DIR = os.path.abspath(os.path.dirname(__file__))  # This directory
    PROJECT_ROOT = os.path.abspath(os.path.join(APP_DIR, os.pardir))
    TEMPLATES_PATH = os.path.join(APP_DIR, 'templates')
    CONFIG_PATH = os.getenv('TUNPROV_CONFIG', '.')
    ROOT_PATH = os.getenv('TUNPROV_ROOT', '/')
    ENDPOINT_STORE_PATH = os.getenv('TUNPROV_ENDPOINT_STORE', '/var/lib/tunprov/endpoints')
    OS_RELEASE_PATH = '/etc/os-release'
    REDHAT_RELEASE_PATH = '/etc/redhat-release'
    OS_FAMILY = os.getenv('TUNPROV_OS_FAMILY', '')
    OS_RELEASE = os.getenv('TUNPROV_OS_RELEASE', '')
    PACKAGE_NAME = 'autossh'
    AUTOSSH_BINARY = '/usr/bin/autossh'
    MANAGE_OWNERSHIP = True
    DRY_RUN = False
    LOG_LEVEL = 'info'
    LOG_PATH = ''


class ProdConfig(Config):
    """Production configuration."""

    ENV = 'prod'
    DEBUG = False


class DevConfig(Config):
    """Development configuration."""

    ENV = 'dev'
    DEBUG = True
    LOG_LEVEL = 'debug'
