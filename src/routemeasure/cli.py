"""Compute route measures for a CSV of points.

Usage:
    routemeasure-locate --url https://host/arcgis/rest/services/LRS/MapServer/3 \\
        --route-id-field ROUTE_ID --route-id R-100 points.csv measured.csv

Options:
    --url: centerline layer URL (or use --map-service with --layer)
    --route-id / --route-id-field / --route-id-type: which route to query
    --wkid: spatial reference of the input coordinates
    --x-field / --y-field: coordinate columns of the input CSV
    --m-field: name of the output measure column
"""
import argparse
import asyncio
import logging
import sys

import pandas as pd

from routemeasure import workflows
from routemeasure.lrs.config import DEFAULT_M_VALUE_FIELD, RouteConfig
from routemeasure.lrs.errors import LinearReferencingError

log = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog='routemeasure-locate', description=__doc__.splitlines()[0])
    parser.add_argument('input', help='CSV file with point coordinates')
    parser.add_argument('output', help='CSV file to write')
    parser.add_argument('--url', help='centerline layer URL')
    parser.add_argument('--map-service', help='map service URL used to discover the centerline layer')
    parser.add_argument('--layer', help='name of the centerline layer on --map-service')
    parser.add_argument('--route-id', required=True)
    parser.add_argument('--route-id-field', required=True)
    parser.add_argument('--route-id-type', default='esriFieldTypeString')
    parser.add_argument('--wkid', type=int, default=None)
    parser.add_argument('--x-field', default='x')
    parser.add_argument('--y-field', default='y')
    parser.add_argument('--m-field', default=DEFAULT_M_VALUE_FIELD)
    parser.add_argument('--verbose', action='store_true')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
    )

    try:
        config = RouteConfig(
            route_id_field=args.route_id_field,
            route_id_field_type=args.route_id_type,
            centerline_url=args.url,
            map_service=args.map_service,
            centerline_layer=args.layer,
        )
        points = pd.read_csv(args.input)
        spatial_reference = {'wkid': args.wkid} if args.wkid is not None else None
        result = asyncio.run(workflows.calculate_m_values_from_coordinates(
            config, args.route_id, points, spatial_reference,
            x_field=args.x_field, y_field=args.y_field, m_value_field=args.m_field,
        ))
    except LinearReferencingError as e:
        log.error('%s', e)
        return 1

    result.to_csv(args.output, index=False)
    log.info('Wrote %d rows to %s', len(result), args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
