from fastapi import Depends

from app.db.prismic import get_prismic
from app.repos.posts_repo import PrismicPostsRepo
from app.services.page_cache import page_cache
from app.services.post_assembler import PostAssembler
from app.services.posts_service import PostsService


def get_posts_repo(prismic=Depends(get_prismic)):
    return PrismicPostsRepo(prismic)


def get_post_assembler(repo=Depends(get_posts_repo)):
    return PostAssembler(repo)


def get_posts_service(
    repo=Depends(get_posts_repo),
    assembler=Depends(get_post_assembler),
):
    return PostsService(repo=repo, assembler=assembler, cache=page_cache)
