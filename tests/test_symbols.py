from textwrap import dedent

from nestdeps.extractors.nest.symbols import SymbolResolver
from nestdeps.extractors.nest.syntax import parse_typescript


def _resolver(code):
    return SymbolResolver(parse_typescript(dedent(code)).root_node)


def test_resolve_import_path_matches_every_binding_form():
    resolver = _resolver(
        """
        import Default from './default';
        import * as Helpers from '../helpers';
        import { CatsModule, DogsModule as Dogs } from './animals';
        import { JwtModule } from '@nestjs/jwt';
        import { Controller } from '@nestjs/common/decorators';
        import './side-effect';
        """
    )
    assert resolver.resolve_import_path("Default") == "./default"
    assert resolver.resolve_import_path("Helpers") == "../helpers"
    assert resolver.resolve_import_path("CatsModule") == "./animals"
    assert resolver.resolve_import_path("Dogs") == "./animals"
    assert resolver.resolve_import_path("DogsModule") is None
    assert resolver.resolve_import_path("JwtModule") == "jwt"
    assert resolver.resolve_import_path("Controller") == "decorators"
    assert resolver.resolve_import_path("Nowhere") is None


def test_find_class_declaration_sees_exported_and_plain_classes():
    resolver = _resolver(
        """
        export class Exported {}
        class Plain {}
        """
    )
    assert resolver.find_class_declaration("Exported") is not None
    assert resolver.find_class_declaration("Plain") is not None
    assert resolver.find_class_declaration("Missing") is None


def test_constructor_dependencies_keep_named_types_in_order():
    resolver = _resolver(
        """
        export class OrdersService {
          private cache = new Map();

          constructor(
            @InjectRepository(Order) private readonly orders: Repository<Order>,
            private readonly events: events.EventBus,
            private readonly mailer: MailerService,
            retries: number,
            tags: string[],
            options: { verbose: boolean },
            mode: 'fast' | 'slow',
            untyped,
            optional?: AuditService,
          ) {}
        }
        """
    )
    assert resolver.constructor_dependencies("OrdersService") == [
        "Repository",
        "events.EventBus",
        "MailerService",
        "AuditService",
    ]


def test_constructor_dependencies_without_constructor_or_class():
    resolver = _resolver(
        """
        export class NoConstructor {
          handle() {}
        }
        """
    )
    assert resolver.constructor_dependencies("NoConstructor") == []
    assert resolver.constructor_dependencies("Elsewhere") == []


def test_is_class_injectable():
    resolver = _resolver(
        """
        @Injectable()
        export class Marked {}

        @Injectable
        class MarkedBare {}

        @Controller('cats')
        export class NotMarked {}
        """
    )
    assert resolver.is_class_injectable("Marked") is True
    assert resolver.is_class_injectable("MarkedBare") is True
    assert resolver.is_class_injectable("NotMarked") is False
    assert resolver.is_class_injectable("Missing") is False
