from textwrap import dedent

import pytest

APP_MODULE = """
import { Module } from '@nestjs/common';
import { ConfigModule } from '@nestjs/config';
import { TypeOrmModule } from '@nestjs/typeorm';
import { UsersModule } from './users/users.module';
import { AuthModule } from './auth/auth.module';
import { AppController } from './app.controller';
import { AppService } from './app.service';

@Module({
  imports: [
    ConfigModule.forRoot({ isGlobal: true }),
    TypeOrmModule.forRoot({ type: 'postgres', entities: [User, Post] }),
    UsersModule,
    AuthModule,
  ],
  controllers: [AppController],
  providers: [AppService],
})
export class AppModule {}
"""

USERS_MODULE = """
import { Module, forwardRef } from '@nestjs/common';
import { TypeOrmModule } from '@nestjs/typeorm';
import { AuthModule } from '../auth/auth.module';
import { User } from './user.entity';
import { UsersService } from './users.service';

@Module({
  imports: [TypeOrmModule.forFeature([User]), forwardRef(() => AuthModule)],
  providers: [
    UsersService,
    {
      provide: 'USERS_REPOSITORY',
      useFactory: (ds) => ds.getRepository(User),
      inject: ['DATA_SOURCE'],
    },
  ],
  exports: [UsersService],
})
export class UsersModule {}
"""

AUTH_MODULE = """
import { Injectable, Module, forwardRef } from '@nestjs/common';
import { UsersModule } from '../users/users.module';

@Injectable()
export class AuthService {
  constructor(
    private readonly usersService: UsersService,
    private readonly jwt: JwtService,
  ) {}
}

@Module({
  imports: [forwardRef(() => UsersModule)],
  providers: [AuthService, { provide: 'AUTH_SECRET', useValue: 'secret' }],
  exports: [AuthService],
})
export class AuthModule {}
"""


def write_source(path, code):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dedent(code), encoding="utf-8")
    return path


@pytest.fixture
def nest_project(tmp_path):
    """A small NestJS project: AppModule plus mutually referencing Users/Auth modules."""
    src = tmp_path / "src"
    write_source(src / "app.module.ts", APP_MODULE)
    write_source(src / "users" / "users.module.ts", USERS_MODULE)
    write_source(src / "auth" / "auth.module.ts", AUTH_MODULE)
    write_source(src / "users" / "users.service.ts", "export class UsersService {}\n")
    return tmp_path
