"""
Generated file content — the WordPress CORS mu-plugin, the Drupal CORS
parameters, and the frontend's API endpoint variables.

All three name the frontend origin (or the backend URLs) taken from the
workspace configuration; nothing here touches the filesystem.
"""

from __future__ import annotations

from string import Template
from typing import Any

from devstack.core.models.site import SiteKind
from devstack.core.models.workspace import WorkspaceConfig

WP_CORS_PLUGIN_PATH = "web/app/mu-plugins/ddev_cors_setup.php"

DRUPAL_SERVICES_PATH = "web/sites/default/services.yml"
DRUPAL_DEFAULT_SERVICES_PATH = "web/sites/default/default.services.yml"
DRUPAL_CORS_SECTION = "parameters"
DRUPAL_CORS_KEY = "cors.config"

FRONTEND_ENV_FILE = ".env.local"
FRONTEND_ENV_MARKER = "VITE_WORDPRESS_API_URL"

_WP_CORS_PLUGIN = Template("""\
<?php
/**
 * Plugin Name: DDEV CORS Setup
 * Description: Enables CORS headers for the REST API for the frontend DDEV site.
 */

add_action( 'rest_api_init', function() {
    remove_filter( 'rest_pre_serve_request', 'rest_send_cors_headers' );
    add_filter( 'rest_pre_serve_request', function( $$value ) {
        $$frontend_origin = '${origin}';
        if ( isset( $$_SERVER['HTTP_ORIGIN'] ) && $$_SERVER['HTTP_ORIGIN'] === $$frontend_origin ) {
            header( 'Access-Control-Allow-Origin: ' . $$frontend_origin );
            header( 'Access-Control-Allow-Methods: ${methods}' );
            header( 'Access-Control-Allow-Credentials: ${credentials}' );
            header( 'Access-Control-Allow-Headers: ${headers}' );
            if ( 'OPTIONS' === $$_SERVER['REQUEST_METHOD'] ) {
                status_header( 200 );
                exit();
            }
        }
        return $$value;
    });
}, 15 );
""")


def wordpress_cors_plugin(config: WorkspaceConfig) -> str:
    """PHP mu-plugin granting the frontend origin access to the REST API."""
    cors = config.cors
    return _WP_CORS_PLUGIN.substitute(
        origin=config.url(SiteKind.FRONTEND),
        methods=", ".join(cors.methods),
        headers=", ".join(cors.headers),
        credentials="true" if cors.supports_credentials else "false",
    )


def drupal_cors_config(config: WorkspaceConfig) -> dict[str, Any]:
    """The ``cors.config`` parameter block for Drupal's services.yml."""
    cors = config.cors
    return {
        "enabled": True,
        "allowedHeaders": list(cors.headers),
        "allowedMethods": list(cors.methods),
        "allowedOrigins": [config.url(SiteKind.FRONTEND)],
        "allowedOriginsPatterns": [],
        "exposedHeaders": False,
        "maxAge": cors.max_age,
        "supportsCredentials": cors.supports_credentials,
    }


def frontend_env_block(config: WorkspaceConfig) -> str:
    """Vite variables pointing the SPA at both backends' APIs."""
    return "\n".join([
        "# Backend API endpoints (written by devstack)",
        f"{FRONTEND_ENV_MARKER}={config.url(SiteKind.WORDPRESS)}/wp-json",
        f"VITE_DRUPAL_API_URL={config.url(SiteKind.DRUPAL)}/jsonapi",
    ])
